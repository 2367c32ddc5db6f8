"""
Web Gateway

API proxy layer in front of the marketplace backend:
- Session token validation (bearer header or session cookie)
- Declarative capability checks per route
- Request forwarding with the session's backend access token
- Response relay with the backend's status code

Port: 8300
"""

__version__ = "1.0.0"
__service__ = "web_gateway"
