import logging, os

from travtrack import env
from travtrack.persistence.paths import state_path
from travtrack.repl.loop import main


def _setup_logging() -> None:
    enable = str(os.getenv("TRAVTRACK_LOGGING", "")).strip().lower() in {"1", "true", "yes", "on"}
    if not enable:
        # Silence root logger and clear any default handlers when logging is disabled.
        logging.disable(logging.CRITICAL)
        root = logging.getLogger()
        root.handlers.clear()
        return

    level = logging.DEBUG if env.debug_enabled() else logging.INFO
    log_dir = state_path("logs")
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.FileHandler(log_dir / "travtrack.log", encoding="utf-8")],
    )


def run() -> None:
    _setup_logging()
    main()


if __name__ == "__main__":
    run()
