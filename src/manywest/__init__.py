"""Generate a shell script that packs the text files of a directory into a txtar archive."""

__version__ = "0.1.0"
