"""Speech output helpers.

Outbound interviewer text is paired with SSML for the channel's speech
synthesizer.
"""

from screening_interviewer.voice.ssml import escape_ssml, to_ssml

__all__ = ["escape_ssml", "to_ssml"]
