"""
Drive Backup - Services Package
===============================

External integrations used by the backup job: the database container
(through docker exec) and Google Drive.

Available Services:
    backup: Dump, upload and retention pruning
"""
