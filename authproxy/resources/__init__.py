from .authproxyworkload import AuthProxyWorkload
from .store import Store, KubernetesStore

__all__ = ["AuthProxyWorkload", "Store", "KubernetesStore"]
