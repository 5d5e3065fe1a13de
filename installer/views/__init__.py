from .install import install
from .oauth import oauth_start, oauth_callback
