"""
application - Use-case services and request context.

Depends on domain/ only; infrastructure arrives through constructor injection.
"""
