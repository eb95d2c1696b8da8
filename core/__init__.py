"""core: enums, error taxonomy and the package logger shared by every module."""
