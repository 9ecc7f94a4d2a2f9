"""Calculator: expression engine, settings/history stores and the PySide6 shell."""
