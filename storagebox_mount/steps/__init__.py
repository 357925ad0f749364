from .step_10_preflight import PreflightStep
from .step_20_resolve_profile import ResolveProfileStep
from .step_30_credentials import LoadCredentialsStep
from .step_35_connectivity import ConnectivityStep
from .step_40_mount_options import MountOptionsStep
from .step_45_write_credentials import WriteCredentialsStep
from .step_50_prepare_mount_point import PrepareMountPointStep
from .step_55_negotiate import NegotiateStep
from .step_60_mount import MountStep
from .step_70_persist import PersistStep
from .step_90_summary import SummaryStep

__all__ = [
    "PreflightStep",
    "ResolveProfileStep",
    "LoadCredentialsStep",
    "ConnectivityStep",
    "MountOptionsStep",
    "WriteCredentialsStep",
    "PrepareMountPointStep",
    "NegotiateStep",
    "MountStep",
    "PersistStep",
    "SummaryStep",
]
