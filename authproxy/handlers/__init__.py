from authproxy.handlers import authproxyworkload, probes

__all__ = [
    "authproxyworkload",
    "probes",
]
