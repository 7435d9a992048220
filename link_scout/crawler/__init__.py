"""Crawl engine: fetcher, link extraction, robots.txt rules and the async crawler."""
