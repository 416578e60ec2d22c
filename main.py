import sys
from PySide6.QtWidgets import QApplication
from PySide6.QtGui import QFont
from qt_material import apply_stylesheet

from core.config import load_settings
from ui import MainWindow


def main():
    app = QApplication(sys.argv)
    app.setApplicationName("Video Toolbox")

    settings = load_settings()

    # Base font
    font = QFont("Segoe UI", 10)
    app.setFont(font)

    apply_stylesheet(app, theme=settings.theme)

    window = MainWindow(settings)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
