"""Bundled rule table used when no rules file is configured."""

DEFAULT_RULES = [
    {
        "id": "admin",
        "label": "Administrative Documents",
        "extensions": [".pdf", ".docx", ".doc", ".xlsx", ".xls", ".pptx", ".txt", ".csv"],
        "target_folder": "Documents/Admin",
        "icon": "file-text",
        "description": "Invoices, contracts and official paperwork",
    },
    {
        "id": "media",
        "label": "Photos & Memories",
        "extensions": [".jpg", ".jpeg", ".png", ".gif", ".heic", ".svg", ".mov", ".mp4"],
        "target_folder": "Pictures/Sorted",
        "icon": "image",
        "description": "Personal photos and videos",
    },
    {
        "id": "misc",
        "label": "Archives & Installers",
        "extensions": [".zip", ".rar", ".7z", ".dmg", ".pkg", ".iso"],
        "target_folder": "Downloads/Installers",
        "icon": "archive",
        "description": "Archives and installation files",
    },
]
