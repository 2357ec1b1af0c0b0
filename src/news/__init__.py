"""
News Module
===========

Scraping and summarization pipeline for financial news:
- Link discovery and content extraction per news site
- Article storage with processing lifecycle tracking
- LLM summaries with attempt and error bookkeeping
- Scheduled scrape/summarize cycles with retry and backoff
"""
