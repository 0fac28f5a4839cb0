"""sshhop: browse SSH config hosts, inspect ProxyJump chains, log in with sshpass."""

__version__ = "1.0.0"
