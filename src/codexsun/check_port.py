import errno
import socket
import sys

from codexsun.core.config import get_app_host, get_app_port

# Windows reports EADDRINUSE as WSAEADDRINUSE
ADDR_IN_USE = (errno.EADDRINUSE, 10048)


def bind_socket(host: str, port: int, backlog: int = 2048) -> socket.socket:
    """
    Bind a listening TCP socket on host:port.

    Raises:
        OSError: If the address cannot be bound (port in use, permission denied, ...)
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    bind_host = "" if host == "0.0.0.0" else host  # Bind to all interfaces

    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((bind_host, port))
        sock.listen(backlog)
    except OSError:
        sock.close()
        raise
    sock.setblocking(False)
    return sock


def is_address_in_use(exc: OSError) -> bool:
    return exc.errno in ADDR_IN_USE or "Address already in use" in str(exc)


def check_port():
    try:
        host = get_app_host()
        port = get_app_port()
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    print(f"Checking if port {port} is available on {host}...")

    try:
        sock = bind_socket(host, port)
    except OSError as e:
        if is_address_in_use(e):
            print(f"\n[ERROR] Port {port} is already in use!")
            print(f"Something is already listening on port {port}.")
            print("Please stop the existing process or change APP_PORT in your .env file.")
            sys.exit(1)
        print(f"Error checking port {port}: {e}")
        sys.exit(1)

    sock.close()
    print(f"Port {port} is available.")
    sys.exit(0)


if __name__ == "__main__":
    check_port()
