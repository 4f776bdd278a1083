"""Test doubles for the embedding, LLM and image collaborators."""

import json


class FakeEmbed:
    """Embedding callable returning a fixed vector and counting calls."""

    def __init__(self, vector=(1.0, 0.0, 0.0), error=None):
        self.vector = list(vector)
        self.error = error
        self.calls = []

    def __call__(self, texts):
        self.calls.append(list(texts))
        if self.error:
            raise self.error
        return [self.vector for _ in texts]


class FakeLLM:
    """Stand-in for ChatLLM.chat with a canned reply or error."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def chat(self, system, user, **kwargs):
        self.calls.append((system, user))
        if self.error:
            raise self.error
        return self.reply if isinstance(self.reply, str) else json.dumps(self.reply)


class FakeImages:
    def __init__(self, fail_for=()):
        self.fail_for = set(fail_for)
        self.calls = []

    def __call__(self, species_name):
        self.calls.append(species_name)
        if species_name in self.fail_for:
            raise RuntimeError("GBIF down")
        return [f"https://img.example/{species_name.replace(' ', '_')}.jpg"]


