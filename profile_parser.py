#!/usr/bin/env python3
"""Profile tagtree to find performance bottlenecks."""

import cProfile
import io
import pstats

from tagtree import HTMLParser

# Sample HTML
html = """
<!DOCTYPE html>
<html>
<head><title>Test</title><link rel="stylesheet" href="site.css"></head>
<body>
    <div class="container" id=main>
        <p>Paragraph 1<br>continued</p>
        <p>Paragraph 2 <img src="a.png" alt=""></p>
        <!-- a comment -- with dashes -->
        <ul><li>One<li>Two</ul>
    </div>
</body>
</html>
""" * 100  # Repeat for more meaningful results

parser = HTMLParser()

# Profile
pr = cProfile.Profile()
pr.enable()

for _ in range(10):
    document = parser.parse(html)

pr.disable()

# Print stats
s = io.StringIO()
ps = pstats.Stats(pr, stream=s).sort_stats("cumulative")
ps.print_stats(50)  # Top 50 functions
print(s.getvalue())
