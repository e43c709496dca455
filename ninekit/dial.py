"""Connecting to 9P servers over sockets and locating the name space."""

from __future__ import annotations

import os
import re
import socket

from ninekit.client import Conn, Fsys

__all__ = ["dial", "dial_service", "mount", "mount_service", "namespace"]

_DOT_ZERO = re.compile(r"\A(.*:\d+)\.0\Z", re.DOTALL)


class _SocketStream:
    """Binary stream interface over a connected socket."""

    def __init__(self, sock: socket.socket) -> None:
        self._sock = sock

    def read(self, n: int) -> bytes:
        return self._sock.recv(n)

    def write(self, data: bytes) -> int:
        self._sock.sendall(data)
        return len(data)

    def close(self) -> None:
        self._sock.close()


def _connect(network: str, addr: str) -> socket.socket:
    if network == "unix":
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.connect(addr)
        except BaseException:
            sock.close()
            raise
        return sock
    if network in ("tcp", "tcp4", "tcp6"):
        host, sep, port = addr.rpartition(":")
        if not sep:
            raise ValueError(f"missing port in address {addr!r}")
        host = host.strip("[]") or None
        if network == "tcp":
            return socket.create_connection((host, int(port)))
        family = socket.AF_INET if network == "tcp4" else socket.AF_INET6
        infos = socket.getaddrinfo(host, int(port), family, socket.SOCK_STREAM)
        if not infos:
            raise OSError(f"no address for {addr!r}")
        af, kind, proto, _, sockaddr = infos[0]
        sock = socket.socket(af, kind, proto)
        try:
            sock.connect(sockaddr)
        except BaseException:
            sock.close()
            raise
        return sock
    raise ValueError(f"unknown network {network!r}")


def _getuser() -> str:
    return os.environ.get("USER", "")


def dial(network: str, addr: str) -> Conn:
    """Connect to a 9P server and negotiate the protocol version."""
    sock = _connect(network, addr)
    try:
        return Conn(_SocketStream(sock))
    except BaseException:
        sock.close()
        raise


def dial_service(service: str) -> Conn:
    """Connect to a service posted in the name space directory."""
    return dial("unix", namespace() + "/" + service)


def _attach(conn: Conn) -> Fsys:
    try:
        return conn.attach(None, _getuser(), "")
    except BaseException:
        conn.close()
        raise


def mount(network: str, addr: str) -> Fsys:
    """Connect to a server and attach to its root as the current user."""
    return _attach(dial(network, addr))


def mount_service(service: str) -> Fsys:
    """Connect to a posted service and attach to its root."""
    return _attach(dial_service(service))


def namespace() -> str:
    """Return the path to the name space directory."""
    ns = os.environ.get("NAMESPACE", "")
    if ns:
        return ns
    disp = os.environ.get("DISPLAY", "") or ":0.0"
    m = _DOT_ZERO.match(disp)
    if m:
        disp = m.group(1)
    disp = disp.replace("/", "_")
    return f"/tmp/ns.{os.environ.get('USER', '')}.{disp}"