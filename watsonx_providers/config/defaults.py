"""Centralized defaults for the watsonx adapter.

Endpoint URLs, API version and generation parameter defaults live here so no
other module hard-codes them.
"""

WATSONX_DEFAULT_BASE_URL = "https://us-south.ml.cloud.ibm.com"
WATSONX_DEFAULT_MODEL = "ibm/granite-3-8b-instruct"
WATSONX_API_VERSION = "2024-03-14"
WATSONX_GENERATION_STREAM_PATH = "/ml/v1/text/generation_stream"

WATSONX_DEFAULT_MAX_TOKENS = 4096
WATSONX_DEFAULT_TEMPERATURE = 0.7

IBM_IAM_TOKEN_URL = "https://iam.cloud.ibm.com/identity/token"
IBM_IAM_APIKEY_GRANT = "urn:ibm:params:oauth:grant-type:apikey"

# Tokens are renewed once they are this close to expiry.
TOKEN_SAFETY_MARGIN_SECONDS = 300
# Length of the credential prefix used as the token cache key.
TOKEN_CACHE_KEY_LENGTH = 16
