"""
Prompt templates for the travel assistant.

Templates are plain ``str.format`` strings. Literal braces in JSON examples
are doubled.
"""


# =============================================================================
# Parsers
# =============================================================================

CITY_PARSER_PROMPT = """Extract the city the user is asking about from the message.

Message: "{text}"
Context: {context}

Rules:
- Return the city name in its common English form (e.g. "New York", "Paris").
- Month names, weekdays and words like "there" or "here" are NOT cities.
- If no city is mentioned, return confidence 0.

Return only JSON:
{{"city": "<city as written>", "country": "<country if known>", "normalized": "<clean city name>", "confidence": <0-1>}}"""


DATE_PARSER_PROMPT = """Extract travel dates or the travel month from the message.

Message: "{text}"
Context: {context}

Rules:
- "dates" is a short human-readable string such as "June 10-15" or "March".
- "month" is the full English month name when one is implied.
- Seasons alone (summer, winter) are not dates.
- If nothing date-like is mentioned, return confidence 0.

Return only JSON:
{{"dates": "<dates>", "month": "<month>", "start": "<optional ISO date>", "end": "<optional ISO date>", "confidence": <0-1>}}"""


ORIGIN_DESTINATION_PROMPT = """Extract origin and destination cities from this text.

Text: "{text}"
Context: {context}

Look for patterns like:
- "from X" or "leaving X" = origin
- "to Y" or "in Y" = destination

Return only JSON with originCity and destinationCity (null if not found) and confidence (0-1):
{{"originCity": "<city or null>", "destinationCity": "<city or null>", "confidence": <0-1>}}"""


CITY_LIST_PROMPT = """List every city or destination named in this travel message.

Message: "{text}"

Rules:
- Use the place name as written, in order of appearance, without duplicates.
- Verbs, greetings, months, seasons and weekdays are NOT places, even when capitalized
  at the start of a sentence (e.g. "Heading", "Visiting", "Thinking").
- Return an empty list when no place is named.

Return only JSON:
{{"cities": ["<city>", ...]}}"""


INTENT_PARSER_PROMPT = """Classify the travel question into exactly one intent.

Intents:
- weather: current weather, forecast or climate for a place
- packing: what to pack, bring or wear
- attractions: things to do, sights, museums, activities in a city
- destinations: where to go, destination recommendations
- unknown: anything else

Message: "{text}"
{context_info}

Return only JSON:
{{"intent": "<intent>", "confidence": <0-1>, "slots": {{"city": "<city>", "month": "<month>", "dates": "<dates>", "travelerProfile": "<profile>"}}}}
Omit slots you cannot find."""


# =============================================================================
# Router
# =============================================================================

ROUTER_PROMPT = """You route messages for a travel assistant.

Message: "{message}"
Known context: {context}

Choose one intent:
- weather, destinations, packing, attractions
- policy: visas, passports, baggage, refunds, cancellations, insurance, customs
- web_search: needs live information from the web (events, prices, news, flights)
- system: questions about the assistant itself
- unknown: general travel chit-chat

Also extract any slots present in the message: city, originCity, month, dates, travelerProfile.

Return only JSON:
{{"intent": "<intent>", "confidence": <0-1>, "slots": {{}}, "needExternal": <true|false>}}"""


CONTENT_CLASSIFICATION_PROMPT = """Classify the user message for a travel assistant.

Message: "{message}"

content_type is one of:
- system: asks who or what the assistant is
- travel: a travel question (weather, packing, destinations, attractions, policies)
- unrelated: not about travel at all (coding, cooking, sports scores)
- budget: about costs, prices or budgeting a trip
- restaurant: about restaurants or food places
- flight: about flights or airlines
- refinement: a short follow-up adjusting a previous request (e.g. "make it kid-friendly")
- gibberish: random characters or meaningless text
- emoji_only: only emoji

Return only JSON:
{{"content_type": "<type>", "is_explicit_search": <true if the user explicitly asks to search the web>, "has_mixed_languages": <true|false>, "needs_web_search": <true|false>, "confidence": <0-1>}}"""


# =============================================================================
# Consent and clarification
# =============================================================================

CONSENT_DETECTOR_PROMPT = """The assistant asked the user a yes/no question. Decide whether the reply means yes or no.

User reply: "{message}"

Answer with a single word: yes, no, or unclear."""


CLARIFIER_PROMPT = """Write one short, friendly question asking the traveler for the missing information.

Missing: {missing_slots}
Known context: {context}

The question must mention each missing item by name (for example "city" or "dates").
Return only the question."""


# =============================================================================
# Search
# =============================================================================

SEARCH_QUERY_OPTIMIZER_PROMPT = """Rewrite the user's request as a concise web search query.

Request: "{query}"
Context: {context}
Intent: {intent}

Rules:
- Keep city names, dates and key constraints.
- Drop filler words and politeness.
- At most 12 words.

Return only the query text."""


SEARCH_SUMMARIZE_PROMPT = """Summarize these web search results to answer the traveler's question.

Question: {query}

Results (JSON):
{results}

Rules:
- Up to three short paragraphs of plain text, no HTML.
- Only use facts present in the results.
- End with a "Sources:" block listing the URLs you used, numbered."""


DEEP_RESEARCH_QUERIES_PROMPT = """Break this travel planning request into focused web search queries.

Request: "{query}"

Return only JSON:
{{"queries": ["<query 1>", "<query 2>", "<query 3>"]}}
Return between 1 and {max_queries} queries."""


PAGE_SUMMARY_PROMPT = """Summarize the page content below with respect to the traveler's request.

Request: {query}

Content:
{content}

Return 3-5 sentences of concrete, factual information. No preamble."""


OVERALL_SUMMARY_PROMPT = """Combine the page summaries into a single travel recommendation.

Request: {query}

Page summaries:
{summaries}

Write a concise, well-organized answer (at most four short paragraphs). Refer to
sources by their [number]."""


# =============================================================================
# Answer composition
# =============================================================================

BLEND_SYSTEM_PROMPT = """You are a concise, friendly travel assistant.
Answer using only the facts provided. If a fact is missing, say so briefly
instead of guessing. Keep answers under 150 words and do not use markdown
headings."""


WEATHER_BLEND_PROMPT = """Traveler asked: "{message}"

City: {city}
When: {when}
Weather facts: {weather}

Describe the weather the traveler can expect in two or three sentences."""


PACKING_BLEND_PROMPT = """Traveler asked: "{message}"

City: {city}
When: {when}
Traveler profile: {profile}
Weather facts: {weather}
Notes: {notes}

Suggest a short packing list (5-8 items) tailored to the weather and the
traveler profile, followed by one sentence explaining the choices."""


UNKNOWN_BLEND_PROMPT = """Traveler asked: "{message}"

Give a brief, helpful travel-oriented answer. If the question is outside what a
travel assistant can answer, say so and offer help with weather, destinations,
packing or attractions."""


POLICY_ANSWER_PROMPT = """Answer the traveler's policy question using only the excerpts below.

Question: "{question}"

Excerpts:
{excerpts}

Rules:
- Cite excerpts inline as [1], [2].
- If the excerpts do not answer the question, reply exactly: NO_ANSWER"""
