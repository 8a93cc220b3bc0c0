from .context_managers import change_cwd
from .enums import StrEnum
from .version import get_package_version
