"""
Shared service utilities.

- http.py  - ``requests`` session with retry/backoff and a JSON GET helper,
  used by every datasource client.
"""
