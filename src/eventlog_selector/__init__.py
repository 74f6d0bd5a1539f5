"""Discovery, header scanning, and selection of application event logs."""
