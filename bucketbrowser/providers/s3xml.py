import shutil
import sys
import urllib.error
import urllib.request
import xml.etree.ElementTree as ET
from typing import Tuple
from urllib.parse import quote, urlencode, urlparse

from ..errors import FetchFailed, ListingFailed, ListingParseError
from .base import CloudProvider

DEFAULT_TIMEOUT = 30


def parse_s3_url(url: str) -> Tuple[str, str]:
    """Parse an S3 URL into (base_url, bucket_name).

    Supported formats:
      - https://BUCKET.s3.amazonaws.com/          (virtual-hosted)
      - https://BUCKET.s3.REGION.amazonaws.com/   (virtual-hosted with region)
      - https://s3.amazonaws.com/BUCKET/           (path style)
      - https://s3.REGION.amazonaws.com/BUCKET/    (path style with region)
      - https://custom-host:9000/BUCKET/           (S3-compatible endpoint)
    """
    parsed = urlparse(url)
    host = parsed.hostname or ''
    scheme = parsed.scheme or 'https'
    path_parts = [p for p in parsed.path.split('/') if p]

    if host.endswith('.amazonaws.com'):
        labels = host.split('.')
        # BUCKET.s3[.REGION].amazonaws.com
        if len(labels) in (4, 5) and labels[1] == 's3':
            return f"{scheme}://{host}", labels[0]
        # s3[.REGION].amazonaws.com/BUCKET
        if len(labels) in (3, 4) and labels[0] == 's3':
            if not path_parts:
                raise ValueError(f"Cannot determine bucket from URL: {url}")
            return f"{scheme}://{host}/{path_parts[0]}", path_parts[0]

    if not path_parts:
        raise ValueError(f"Cannot determine bucket from URL: {url}")
    bucket_name = path_parts[0]
    port_str = f":{parsed.port}" if parsed.port else ''
    return f"{scheme}://{host}{port_str}/{bucket_name}", bucket_name


def parse_list_response(body: bytes) -> dict:
    """Turn a ListBucketResult XML document into the ListObjectsV2 JSON shape."""
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise ListingParseError(f"Failed to parse listing XML: {e}") from e

    # Handle both namespaced and non-namespaced XML
    ns = ''
    if root.tag.startswith('{'):
        ns = root.tag.split('}')[0] + '}'

    common_prefixes = []
    for cp in root.findall(f'{ns}CommonPrefixes'):
        prefix_elem = cp.find(f'{ns}Prefix')
        if prefix_elem is not None and prefix_elem.text:
            common_prefixes.append({'Prefix': prefix_elem.text})

    contents = []
    for entry in root.findall(f'{ns}Contents'):
        key_elem = entry.find(f'{ns}Key')
        if key_elem is None or not key_elem.text:
            continue
        size_elem = entry.find(f'{ns}Size')
        try:
            size = int(size_elem.text) if size_elem is not None and size_elem.text else 0
        except ValueError as e:
            raise ListingParseError(f"Bad size for key '{key_elem.text}': {size_elem.text}") from e
        item = {'Key': key_elem.text, 'Size': size}
        last_modified_elem = entry.find(f'{ns}LastModified')
        if last_modified_elem is not None and last_modified_elem.text:
            item['LastModified'] = last_modified_elem.text
        contents.append(item)

    return {'CommonPrefixes': common_prefixes, 'Contents': contents}


class S3XMLProvider(CloudProvider):
    """S3 provider using raw HTTP/XML, no SDK or CLI required.

    Bound to the single bucket named by its URL; requests are unsigned,
    so this only works against public buckets.
    """

    name = 's3xml'

    def __init__(self, base_url: str, bucket_name: str, timeout: int = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.bucket_name = bucket_name
        self.timeout = timeout

    def _check_bucket(self, bucket: str, error_cls):
        if bucket != self.bucket_name:
            raise error_cls(
                f"HTTP provider is bound to bucket '{self.bucket_name}', not '{bucket}'"
            )

    def _describe_http_error(self, e: urllib.error.HTTPError, context: str) -> str:
        if e.code == 403:
            message = f"Access denied ({context})"
        elif e.code == 404:
            message = f"Not found ({context})"
        else:
            message = f"HTTP {e.code}: {e.reason} ({context})"
        print(message, file=sys.stderr)
        return message

    def run_listing(self, bucket: str, prefix: str) -> dict:
        self._check_bucket(bucket, ListingFailed)
        params = {
            'list-type': '2',
            'delimiter': '/',
            'prefix': prefix,
        }
        url = f"{self.base_url}?{urlencode(params)}"
        try:
            req = urllib.request.Request(url, method='GET')
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            raise ListingFailed(self._describe_http_error(e, f"listing objects at '{prefix}'")) from e
        except urllib.error.URLError as e:
            print(f"Error listing objects at '{prefix}': {e.reason}", file=sys.stderr)
            raise ListingFailed(f"Error listing objects at '{prefix}': {e.reason}") from e
        return parse_list_response(body)

    def run_fetch(self, bucket: str, key: str, dest_path: str) -> bool:
        self._check_bucket(bucket, FetchFailed)
        url = f"{self.base_url}/{quote(key, safe='/')}"
        try:
            req = urllib.request.Request(url, method='GET')
            with urllib.request.urlopen(req, timeout=self.timeout) as resp, open(dest_path, 'wb') as f:
                shutil.copyfileobj(resp, f)
        except urllib.error.HTTPError as e:
            raise FetchFailed(self._describe_http_error(e, f"downloading '{key}'")) from e
        except urllib.error.URLError as e:
            print(f"Error downloading '{key}': {e.reason}", file=sys.stderr)
            raise FetchFailed(f"Error downloading '{key}': {e.reason}") from e
        return True
