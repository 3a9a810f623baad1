"""
The `documents` package handles files attached to projects and legal requests.

Contents
--------
- attachments
    `DocumentAttachments`: load, upload (multipart, PDF heuristics, chat
    announcement) and download of an owner's documents; `format_file_size`.
- progress
    `UploadProgress`, `ProgressBuffer` (measured) and `simulate_progress`
    (timer ramp), both capped until the upload response arrives.
"""
