"""procfs and sysfs readers used by the report collectors."""
