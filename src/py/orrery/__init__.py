from .http.model import (
	HTTPRequest,
	HTTPResponse,
	HTTPRequestError,
)  # NOQA: F401
from .decorators import on, expose  # NOQA: F401
from .config import ServerConfig  # NOQA: F401
from .model import Service, Application, mount  # NOQA: F401
from .server import run, application  # NOQA: F401


# EOF
