"""Shared configuration, logging, error handling and record types."""
