"""Run the gateway in front of a Redis-compatible server.

Equivalent to ``kv-gateway --redis-url redis://redis:6379/0``; try it with::

    curl -X POST localhost:8080/ -d '{"key": "a", "value": "1"}'
    curl -X GET localhost:8080/ -d '{"key": "a"}'
"""

from kv_gateway.__main__ import main


if __name__ == "__main__":
    main(["--redis-url", "redis://redis:6379/0", "--host", "0.0.0.0"])
