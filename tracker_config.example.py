"""
Tracker Configuration Example

Copy this file to 'tracker_config.py' and fill in your endpoint.
"""

# Server-side tagging endpoint (POST ENDPOINT + PATH)
ENDPOINT = 'https://sst.example.com'
PATH = '/data'

# Identity cookies expected by the server container
DEVICE_ID_COOKIE_NAME = 'fp_device_id'
SESSION_ID_COOKIE_NAME = 'fp_session_id'

# 'cookie' sends ids in a Cookie header, 'inline' as client_id/session_id fields
IDENTITY_TRANSPORT = 'cookie'
LIFECYCLE_IDENTITY_TRANSPORT = None

# Timeouts
SESSION_TIMEOUT_MINUTES = 30
LAUNCH_TIMEOUT_MINUTES = 5

# Optional preview header for debugging a server container
PREVIEW_HEADER = None

# Page opened in the embedded browser
WEBVIEW_URL = 'https://www.example.com/en/blogposts/'

# Write tracker debug output to ~/Desktop/jsontag_debug.log
DEBUG = False
