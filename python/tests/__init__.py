"""
Test suite for the study article builder.

Test Categories:
- Unit tests: annotation extraction, fragment rendering, splicing, index and search engines
- Integration tests: article and site builds, the build and search CLIs
- Edge case tests: malformed blocks, dangling placeholders, unavailable indexes
"""
