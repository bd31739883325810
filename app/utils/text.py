"""
TEXT UTILITY
============

Anti-echo post-processing for model output. Small local models sometimes
repeat the user's prompt at the start of their answer; strip_echo removes
that repetition before the reply goes back to the client.
"""

import re


def strip_echo(response: str, prompt: str) -> str:
    """
    Remove the first case-insensitive occurrence of prompt from response,
    then trim surrounding whitespace.

    If prompt is empty or not found, response is returned unchanged (not even trimmed).
    Only an exact repeat is caught; a reformatted echo stays in the text.
    """
    if not prompt or not response:
        return response

    # Match on the original string so the positions stay valid even when
    # lowercasing would change the length of other characters.
    match = re.search(re.escape(prompt), response, re.IGNORECASE)
    if match is None:
        return response

    return (response[:match.start()] + response[match.end():]).strip()
