"""
Page-List Decoder - reads the image list a LibManga chapter page embeds

The page carries two blocks:
  <script>window.__info = {..., "imgUrl": "/manga/slug/chapters/123/"};</script>
  <span class="pp"><!--W3sicCI6MSwidSI6IjEuanBnIn1d--></span>
The span holds a base64 encoded JSON array of {"p": index, "u": file}.
"""

import json
import base64
import binascii
import logging
from typing import List

from bs4 import BeautifulSoup

from catalog_models import PageRef
from exceptions import MalformedPagePayload

logger = logging.getLogger(__name__)

INFO_VARIABLE = 'window.__info'
PAYLOAD_SELECTOR = 'span.pp'


def _find_info_script(soup: BeautifulSoup) -> str:
    for script in soup.find_all('script'):
        txt = script.string or script.get_text() or ''
        if INFO_VARIABLE in txt:
            return txt
    raise MalformedPagePayload("Chapter info script not found")


def parse_image_prefix(script_text: str) -> str:
    start = script_text.find(INFO_VARIABLE)
    body = script_text[start + len(INFO_VARIABLE):].lstrip() if start != -1 else ''
    if not body.startswith('='):
        raise MalformedPagePayload("Chapter info assignment not found")
    body = body[1:].strip().rstrip(';').strip()
    try:
        info = json.loads(body)
    except ValueError as e:
        raise MalformedPagePayload(f"Chapter info is not valid JSON: {e}") from e
    img_url = info.get('imgUrl') if isinstance(info, dict) else None
    if not isinstance(img_url, str):
        raise MalformedPagePayload("Chapter info has no imgUrl")
    return img_url


def parse_page_payload(raw: str) -> list:
    encoded = raw.replace('<!--', '').replace('-->', '').strip()
    try:
        decoded = base64.b64decode(encoded).decode('utf-8')
        pages = json.loads(decoded)
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise MalformedPagePayload(f"Page payload could not be decoded: {e}") from e
    if not isinstance(pages, list):
        raise MalformedPagePayload("Page payload is not a list")
    return pages


def decode_page_list(soup: BeautifulSoup, static_url: str) -> List[PageRef]:
    """Decode every embedded page into a PageRef with a full image URL"""
    img_url = parse_image_prefix(_find_info_script(soup))

    span = soup.select_one(PAYLOAD_SELECTOR)
    if span is None:
        raise MalformedPagePayload("Page payload element not found")
    entries = parse_page_payload(span.decode_contents())

    pages = []
    for entry in entries:
        try:
            index = int(entry['p'])
            suffix = entry['u']
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedPagePayload(f"Bad page entry {entry!r}") from e
        if not isinstance(suffix, str):
            raise MalformedPagePayload(f"Bad page entry {entry!r}")
        pages.append(PageRef(index=index, image_url=static_url + img_url + suffix))

    logger.info(f"Decoded {len(pages)} pages")
    return pages
