"""
Link-edit moderation.

Edits that add a link to a message, or change a message that already holds
one, are allowed for a grace period after the ORIGINAL post. Later edits get
the message deleted and a short-lived warning posted.

- **url_change_detector.py**: Classifies edits as no_change / added / modified.
- **permission_classifier.py**: Moderator-level permissions are exempt.
- **grace_period.py**: Turns classification, exemption and elapsed time into a decision.
- **violation_recorder.py**: Fire-and-forget persistence of evaluated edits.
- **discord_gateway.py**: Outbound Discord operations used during enforcement.
- **link_edit_enforcer.py**: Applies decisions, with a fallback warning when deletion fails.
- **link_edit_policy.py**: Wires the above for one edit and catches everything.
"""
