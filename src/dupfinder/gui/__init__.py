"""
Qt integration for dupfinder. Requires the optional [gui] extra (PySide6).
"""
