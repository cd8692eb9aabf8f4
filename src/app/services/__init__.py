"""Background services shared by the cookie panel.

This package contains:
- preference_writer.py: off-thread writes of saved table settings
- storage_signal.py: storage-changed signal and report file watching
"""
