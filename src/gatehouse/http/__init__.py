"""Host-facing HTTP vocabulary: the request the gate inspects and the
responses it can decide on."""
