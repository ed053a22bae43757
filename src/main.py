"""
Shodan Trainer - Main Entry Point

Restores (or builds) the technique drill queue and reports it. The playback
widget and preference editor attach to the same container through its facade.
"""

import argparse
import logging
import sys
import os

# Add src to path
src_path = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, src_path)

from PyQt6.QtCore import QCoreApplication, QTimer


def _parse_args(argv):
    parser = argparse.ArgumentParser(description="Shodan technique drill queue")
    parser.add_argument("--config", default="config/default_config.yaml", help="configuration file")
    parser.add_argument("--catalog", help="technique catalog JSON (overrides catalog.path)")
    parser.add_argument("--regenerate", action="store_true", help="always build a fresh queue")
    return parser.parse_args(argv)


def main(argv=None):
    """Application entry point"""
    args = _parse_args(argv if argv is not None else sys.argv[1:])

    from services.config_service import ConfigService
    config = ConfigService(args.config)
    logging.basicConfig(
        level=getattr(logging, str(config.get("app.log_level", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.catalog:
        config.set("catalog.path", args.catalog)

    qt_app = QCoreApplication(sys.argv[:1])
    qt_app.setApplicationName(config.get("app.name", "Shodan Trainer"))
    qt_app.setApplicationVersion(config.get("app.version", "1.0.0"))

    # Create dependency container (composition root)
    from app.container_factory import AppContainerFactory
    from core.event_bus import EventType
    container = AppContainerFactory.create(config_path=args.config, use_qt_timer=True)
    facade = container.facade

    def on_notification(notification):
        if notification is not None:
            print(f"[{notification.kind.value}] {notification.text}")

    facade.subscribe(EventType.NOTIFICATION_CHANGED, on_notification)

    ready = facade.start(force_regenerate=args.regenerate)

    for position, technique in enumerate(facade.queue):
        marker = ">" if technique == facade.current_technique else " "
        print(f"{marker} {position + 1:3d}. {technique.display_name}")

    # Leave once every transient notification has been shown
    def quit_when_idle():
        if not facade.has_pending_notifications:
            qt_app.quit()

    poll = QTimer()
    poll.timeout.connect(quit_when_idle)
    poll.start(200)

    code = qt_app.exec()
    container.cleanup()
    return code if ready else 1


if __name__ == "__main__":
    sys.exit(main())
