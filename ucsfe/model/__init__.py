"""Data models for merchant rules, templates and validation records."""