"""Review Manager — compose, defer, restore and submit reviews; moderate them.

Workflows here orchestrate the access layers (API client, session store) and
consult the auth session before anything reaches the server.
"""
