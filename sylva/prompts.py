# sylva/prompts.py

"""Prompt templates used by the extraction LLM.

Placeholders:
  - {question}: the raw user question
  - {services}: canonical ecosystem service labels
  - {parts}: canonical part-used labels

These strings are rendered in extractor.py and sent to the LLM provider via
providers.ChatLLM.chat as a system + user exchange.
"""

EXTRACTION_SYSTEM_PROMPT = "You are a helpful assistant that extracts structured queries from user questions."

QUERY_EXTRACTION_PROMPT = """
Given the following JSON schema for Amazon forest tree species:
[{{"Species": string, "EcosystemService": string[], "PartsUsed": string[]}}]
and a user question, extract the most relevant query as a JSON object with possible values for:
- species: string or null
- ecosystemService: string or null (must match one of the values in the EcosystemService array: {services})
- partUsed: string or null (must match one of the values in the PartsUsed array: {parts})
- only: boolean (true if the user asks for species used exclusively for a service or part)
- and: object (if the user asks for multiple conditions, e.g. both a service and a part used), with optional keys "ecosystemService" and "partUsed"
If a field is not specified, set it to null. Output only the JSON object, nothing else.

User question: {question}
Query:
"""
