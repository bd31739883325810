"""
UTILITIES PACKAGE
=================

Helpers used by the services (no HTTP, no business logic):

  text - strip_echo(response, prompt): removes a verbatim repeat of the user's prompt.
"""
