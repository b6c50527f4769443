"""Adapters connecting the pipetrak domain to storage and file formats."""
