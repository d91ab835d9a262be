from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


class _ConsoleNoiseFilter(logging.Filter):
    """
    Czytelna konsola interaktywna:
    - wszystkie logi studyplan przechodzą (poziom ustala handler)
    - ostrzeżenia Pythona ('py.warnings') tylko od ERROR
    - loggery bibliotek (sqlalchemy, ...) tylko od ERROR
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith("studyplan."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/studyplan",
    console_level: int | str = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Konfiguruje logowanie:
    - handler konsolowy: Rich na stderr, filtrowany pod pracę interaktywną
    - handler plikowy: pełne logi do debugowania

    Wołać RAZ, przed pierwszym logiem. Zwraca ścieżkę pliku logu.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "studyplan.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Usuń istniejące handlery, żeby nie dublować wpisów.
    for h in list(root.handlers):
        root.removeHandler(h)

    # Konsola (interaktywnie)
    ch = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    ch.setLevel(console_level)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    # Plik (wszystko)
    fh = logging.FileHandler(str(log_file), encoding="utf-8")
    fh.setLevel(file_level)
    fh.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(fh)

    # warnings.warn(...) trafia do logów jako 'py.warnings'
    logging.captureWarnings(True)
    return log_file
