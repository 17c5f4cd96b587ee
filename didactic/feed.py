import datetime
import os
import xml.etree.ElementTree as ET
from email.utils import format_datetime

from didactic.pages import iter_pages
from didactic.reporter import reporter
from didactic.utils import atomic_open


FEED_FILENAME = "rss.xml"


def format_pub_date(date):
    """RFC 2822 date at midnight UTC, as RSS wants it."""
    dt = datetime.datetime.combine(date, datetime.time(), tzinfo=datetime.timezone.utc)
    return format_datetime(dt)


def iter_feed_pages(pages):
    """Dated leaf pages, newest first.  Undated pages are reported."""
    rv = []
    for page in iter_pages(pages):
        if page.is_section:
            continue
        if page.date is None:
            reporter.report_warning("Page %s has no date, excluded from RSS" % page.url)
        else:
            rv.append(page)
    rv.sort(key=lambda x: x.date, reverse=True)
    return rv


def build_feed(pages, site):
    base = (site.get("base_url") or "").rstrip("/")
    title = site.get("title") or ""

    rss = ET.Element("rss", version="2.0")
    channel = ET.SubElement(rss, "channel")
    ET.SubElement(channel, "title").text = title
    ET.SubElement(channel, "link").text = base
    ET.SubElement(channel, "description").text = site.get("description") or title
    ET.SubElement(channel, "language").text = site.get("language") or "en-us"

    for page in iter_feed_pages(pages):
        item = ET.SubElement(channel, "item")
        ET.SubElement(item, "title").text = page.title
        ET.SubElement(item, "link").text = base + page.url
        ET.SubElement(item, "guid").text = base + page.url
        ET.SubElement(item, "pubDate").text = format_pub_date(page.date)

    tree = ET.ElementTree(rss)
    ET.indent(tree, space="  ", level=0)
    return tree


def generate_rss(pages, site, output_path):
    """Writes the RSS feed for a page tree into the output folder."""
    filename = os.path.join(output_path, FEED_FILENAME)
    tree = build_feed(pages, site)
    with atomic_open(filename, "wb") as f:
        tree.write(f, encoding="UTF-8", xml_declaration=True)
    reporter.report_written(FEED_FILENAME)
    return filename
