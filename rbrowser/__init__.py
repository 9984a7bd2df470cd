"""
A minimal HTTP(S) client: fetch a URL, follow redirects, cache to disk, and
decode the body to text.
"""
