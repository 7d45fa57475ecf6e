"""
File Sorting Domain

Watches a folder and classifies files that appear in it:
- rules/ - Ordered extension-to-folder rule catalog
- watchers/ - Folder watcher and multi-folder registry
- sinks.py - Receivers for watcher notifications

Moving the files is left to the consumer of the notifications.
"""

__all__ = ["rules", "watchers", "sinks", "errors"]
