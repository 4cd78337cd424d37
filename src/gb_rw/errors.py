"""Exception hierarchy shared by every gb-rw layer."""


class GBRWError(Exception):
    """Base exception for cartridge reader/writer errors"""
    pass


class UnimplementedOperation(GBRWError):
    """Mode, region or command without a functional path"""
    pass
