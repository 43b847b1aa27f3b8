"""
Article processing: markdown conversion and the per-article / whole-site builds.

Import the modules directly (processing.article_builder, processing.site_builder);
this package does not re-export them so that markup can import the converter
without pulling in the builders.
"""
