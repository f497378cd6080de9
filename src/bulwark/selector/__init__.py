from bulwark.selector.cascade import CascadingUnitSelector

__all__ = ["CascadingUnitSelector"]
