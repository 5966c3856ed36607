"""TaskHub — personal task tracking behind a token-guarded REST API.

Users sign up, log in, and manage their own tasks: create, search,
filter, complete, and delete. Every task belongs to exactly one user
and is invisible to everyone else.
"""

__version__ = "0.1.0"
