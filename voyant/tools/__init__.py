"""
Thin wrappers around external services.

Modules:
- weather: Open-Meteo geocoding, forecast and climate
- destinations: catalog recommender enriched by countries (REST Countries)
- attractions: OpenTripMap places
- tavily_search: Tavily web search
- crawler / deep_research: page crawling and multi-source research
- policy_kb: internal policy knowledge base
"""
