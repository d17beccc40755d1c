"""arr-backup: fetch manual backups from Sonarr/Radarr style servers."""

__version__ = "0.1.0"
__author__ = "arr-backup contributors"
