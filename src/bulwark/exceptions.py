class BulwarkError(Exception):
    """Base exception for Bulwark errors."""
    pass

class ConfigError(BulwarkError):
    """Configuration loading specific errors."""
    pass

class OrgTreeError(BulwarkError):
    """Structural violations detected while building an organization tree."""
    pass

class SelectionError(BulwarkError):
    """Invalid transition requested from the cascading unit selector."""
    pass
