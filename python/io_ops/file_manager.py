import json
import os
import tempfile
from pathlib import Path
from typing import Any, List, Optional, Union

from colored_logger import get_colored_logger

logger = get_colored_logger(__name__)

PathLike = Union[str, Path]


class FileManager:
    @staticmethod
    def ensure_dir_exists(directory: PathLike) -> None:
        Path(directory).mkdir(parents=True, exist_ok=True)

    @staticmethod
    def write_to_file(file_path: PathLike, content: str) -> None:
        """Write text atomically: temp file in the same directory, then os.replace."""
        file_path = Path(file_path)
        FileManager.ensure_dir_exists(file_path.parent)

        fd, temp_path = tempfile.mkstemp(
            dir=str(file_path.parent), prefix=f".{file_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(temp_path, file_path)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    @staticmethod
    def write_json(file_path: PathLike, data: Any) -> None:
        FileManager.write_to_file(
            file_path, json.dumps(data, ensure_ascii=False, indent=2)
        )

    @staticmethod
    def read_json(file_path: PathLike) -> Optional[Any]:
        """Read a JSON file, returning None (and logging) if it is missing or invalid."""
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            logger.debug("JSON file not found: %s", file_path)
            return None
        except (json.JSONDecodeError, RecursionError, UnicodeDecodeError, OSError) as e:
            logger.error("Failed to read JSON from %s: %s", file_path, e)
            return None

    @staticmethod
    def list_articles(directory: PathLike, extension: str = ".md") -> List[Path]:
        """Article files in a directory, sorted by name; names starting with '_' are drafts."""
        directory = Path(directory)
        if not directory.is_dir():
            logger.warning("Articles directory does not exist: %s", directory)
            return []

        return sorted(
            path
            for path in directory.iterdir()
            if path.is_file() and path.suffix == extension and not path.name.startswith("_")
        )
