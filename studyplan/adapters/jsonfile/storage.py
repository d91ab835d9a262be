import logging
import os
import re
from pathlib import Path

from studyplan.domain.errors import StorageFault

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStorage:
    """
    Storage klucz-wartość na plikach: jeden plik `<key>.json` na klucz w `directory`.

    Zapis jest atomowy (zapis do `<key>.json.swap`, fsync, `os.replace`), więc nieudany
    zapis zostawia poprzednią wartość czytelną.
    """

    def __init__(self, directory: Path) -> None:
        """Tworzy katalog danych, jeśli jeszcze nie istnieje."""
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageFault(key, "key may only contain letters, digits, '.', '_' and '-'")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        """Zwraca zawartość pliku albo None, gdy klucz nigdy nie był zapisany."""
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageFault(key, str(e))

    def set(self, key: str, blob: str) -> None:
        """Atomowo podmienia zawartość pliku."""
        path = self._path(key)
        tmp = path.with_suffix(path.suffix + ".swap")
        try:
            with tmp.open("w", encoding="utf-8", newline="\n") as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except OSError as e:
            try:
                if tmp.exists():
                    tmp.unlink()
            except OSError:
                logger.debug("Could not remove swap file %s", tmp)
            raise StorageFault(key, str(e))
        logger.debug("Wrote %s (%d bytes)", path, len(blob))
