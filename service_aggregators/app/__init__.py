"""
Aggregator routing package.

Sits between metric producers and aggregators: filters inbound metrics
per aggregator, forwards the selected ones, tells the pipeline whether to
drop the originals, and names and tags what aggregators emit.
"""
