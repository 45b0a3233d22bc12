import argparse
import locale
import sys

import boto3
import botocore
import botocore.client

from . import __version__
from .app import BucketBrowserApp, TerminalNotifier
from .cache import ObjectCache
from .config import apply_overrides, get_cache_dir, is_verbose, load_config
from .providers.awscli import AwsCliProvider
from .providers.s3 import S3Provider
from .providers.s3xml import S3XMLProvider, parse_s3_url
from .tree import TreeAdapter

PROVIDER_CHOICES = ['awscli', 's3', 's3xml']


def create_s3_client(profile=None, access_key=None, secret_key=None, unsigned=False):
    if profile:
        session = boto3.Session(profile_name=profile)
        return session.client('s3')
    elif access_key and secret_key:
        return boto3.client(
            's3',
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
        )
    elif unsigned:
        return boto3.client(
            's3',
            config=botocore.client.Config(signature_version=botocore.UNSIGNED),
        )
    else:
        # Default credential chain (env vars, ~/.aws, instance role).
        return boto3.client('s3')


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='BucketBrowser - browse an S3 bucket as a folder tree')
    parser.add_argument('--bucket', help='S3 bucket name (overrides general.bucket)')
    parser.add_argument('--prefix', help='Base prefix shown as the tree root (overrides general.prefix)')
    parser.add_argument('--provider', choices=PROVIDER_CHOICES, help='Backend used to list and fetch (default: awscli)')
    parser.add_argument('--url', help='S3 HTTP URL for the s3xml provider (e.g. https://bucket.s3.us-west-2.amazonaws.com/)')
    parser.add_argument('--cache-dir', help='Directory downloaded objects are kept in')
    parser.add_argument('--config', dest='config_path', default=None, help='Path to config file (default: ~/.bucketbrowser/config.json)')
    parser.add_argument('-v', '--verbose', action='store_true', default=None, help='Echo backend commands to stderr')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    group = parser.add_argument_group('S3 Authentication methods')
    group.add_argument('--profile', help='AWS CLI profile name')
    group.add_argument('--access-key', help='AWS access key (s3 provider only)')
    group.add_argument('--secret-key', help='AWS secret key (s3 provider only)')
    group.add_argument('--unsigned', action='store_true', help='Send unsigned requests (public buckets, s3 provider only)')
    args = parser.parse_args(argv)

    if (args.access_key and not args.secret_key) or (args.secret_key and not args.access_key):
        parser.error('--access-key and --secret-key must be provided together')
    if sum(1 for x in [args.profile, args.access_key, args.unsigned] if x) > 1:
        parser.error('Only one authentication method (--profile, --access-key, --unsigned) can be used.')
    return args


def build_provider(config, args=None):
    """Instantiate the backend named by general.provider."""
    general = config.get("general", {})
    name = general.get("provider") or "awscli"
    profile = general.get("profile")
    verbose = is_verbose(config)

    if name == 'awscli':
        provider = AwsCliProvider(profile=profile, verbose=verbose)
        if not provider.is_available():
            print("Warning: 'aws' executable not found on PATH; listings will fail.", file=sys.stderr)
        return provider
    if name == 's3':
        client = create_s3_client(
            profile=profile,
            access_key=getattr(args, 'access_key', None),
            secret_key=getattr(args, 'secret_key', None),
            unsigned=bool(getattr(args, 'unsigned', False)),
        )
        return S3Provider(client)
    if name == 's3xml':
        url = general.get("url")
        if not url:
            raise ValueError("--url (or general.url) is required when using --provider s3xml")
        base_url, bucket_name = parse_s3_url(url)
        if not general.get("bucket"):
            general["bucket"] = bucket_name
        return S3XMLProvider(base_url, bucket_name)
    raise ValueError(f"Unknown provider: {name}")


def main(argv=None):
    args = parse_args(argv)
    try:
        locale.setlocale(locale.LC_COLLATE, '')
    except locale.Error:
        pass
    config = load_config(args.config_path)
    apply_overrides(
        config,
        bucket=args.bucket,
        prefix=args.prefix,
        provider=args.provider,
        url=args.url,
        profile=args.profile,
        cache_dir=args.cache_dir,
        verbose=args.verbose,
    )
    if args.url and not args.provider:
        config["general"]["provider"] = 's3xml'

    try:
        provider = build_provider(config, args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        print(f"Error creating S3 client: {e}", file=sys.stderr)
        return 1

    cache = ObjectCache(provider, get_cache_dir(config))
    adapter = TreeAdapter(config, provider, cache, TerminalNotifier())
    app = BucketBrowserApp(adapter)
    app.run()
    return 0


if __name__ == '__main__':
    sys.exit(main())
