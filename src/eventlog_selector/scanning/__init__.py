"""Concurrent header scanning of discovered event logs."""
