"""Care home care file API."""
