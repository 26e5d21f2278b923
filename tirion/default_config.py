"""
Tirion default configuration settings.
"""


#: API root endpoint.
API_ROOT = 'https://api.example.com/v1/'

#: API key identifier used for authentication.
API_KEY_ID = None

#: API key secret used for authentication.
API_KEY_SECRET = None

#: Whether or not to verify the API SSL certificate, or a path to a CA_BUNDLE
#: file with certificates of trusted CAs.
VERIFY_CERTIFICATE = True

#: Time to wait for the server to respond (in seconds), `None` to wait
#: forever.
REQUEST_TIMEOUT = 30
