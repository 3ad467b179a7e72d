#!/usr/bin/env python
#
# (c) Copyright 2025 by AgriDatum contributors. This file is covered by license found in COPYING.
#
# To use this, install with:
#
#   pip install --editable '.[cli]'
#
# That will create the command "agridatum" in your path.
#
#
import click, sys, json, logging
from functools import wraps
from getpass import getpass

from agridatum.api import HarvestApi
from agridatum.config import load_config
from agridatum.constants import *
from agridatum.exceptions import BackendError, HarvestValidationError
from agridatum.identity import derive, validate_pin
from agridatum.records import HarvestPayload, RecordStore
from agridatum.session import FarmerSession, validate_weight
from agridatum.signers import pick_signer
from agridatum.utils import trim_txn, explorer_url
from agridatum import __version__

# dict of options that apply to all commands
global global_opts
global_opts = dict()

# Cleanup display (supress traceback) for user-feedback exceptions
_sys_excepthook = sys.excepthook
def my_hook(ty, val, tb):
    if issubclass(ty, (BackendError, HarvestValidationError, RuntimeError)):
        print("FATAL: %s" % val, file=sys.stderr)
    else:
        return _sys_excepthook(ty, val, tb)
sys.excepthook=my_hook

def fail(msg):
    # show message and stop
    click.echo(f"FAILURE: {msg}", err=True)
    sys.exit(1)

def get_config():
    global global_opts
    try:
        return load_config(api_url=global_opts.get('api_url'),
                           signers=global_opts.get('signer'),
                           timeout=global_opts.get('timeout'))
    except ValueError as err:
        fail(str(err))

def get_api(config=None):
    return HarvestApi.from_config(config or get_config())

def get_signer(api, config=None):
    config = config or get_config()
    return pick_signer(config.signers, api)

def cleanup_pin(pin, prompt="6-digit PIN", confirm=False):
    # prompt if needed, fail if not exactly six digits
    if not pin:
        pin = getpass(f"Enter {prompt}: ")

        if confirm:
            chk = getpass(f"Repeat {prompt}: ")
            if chk != pin:
                fail("Does not match first try!? Stop.")

    pin = pin.strip()
    try:
        validate_pin(pin)
    except HarvestValidationError as err:
        fail(str(err))

    return pin

def get_session(phone, pin, load_records=True):
    # login; this is the only way we learn who the farmer is
    config = get_config()
    api = get_api(config)
    pin = cleanup_pin(pin)
    try:
        return FarmerSession.login(phone, pin, api, get_signer(api, config),
                                        load_records=load_records), pin
    except HarvestValidationError as err:
        fail(str(err))

def display_errors(f):
    # clean-up display of errors from backend
    @wraps(f)
    def wrapper(*args, **kws):
        try:
            return f(*args, **kws)
        except BackendError as exc:
            click.echo("\n%s\n" % str(exc), err=True)
            sys.exit(1)
    return wrapper

def show_record(rec, detail=False):
    click.echo(f"#{rec.id}: {rec.crop_type} Harvest, {rec.weight_kg:g} kg @ {rec.plot_location}")
    click.echo(f"    {rec.timestamp}")
    if rec.on_chain:
        tag = ' (On-Chain)' if rec.indexed_on_chain else ''
        click.echo(f"    txn: {trim_txn(rec.transaction_hash)}{tag}")
    if detail:
        click.echo(f"    address: {rec.farmer_address}")
        click.echo(f"    pubkey:  {rec.public_key}")
        if rec.signature:
            click.echo(f"    sig:     {rec.signature}...")

# Accept any prefix of a command name.
#
# from <https://click.palletsprojects.com/en/8.0.x/advanced/?#command-aliases>
class AliasedGroup(click.Group):
    def get_command(self, ctx, cmd_name):
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv
        matches = [x for x in self.list_commands(ctx)
                   if x.startswith(cmd_name)]
        if not matches:
            return None
        elif len(matches) == 1:
            return click.Group.get_command(self, ctx, matches[0])
        ctx.fail(f"Abiguous command. Pick one of: {' | '.join(sorted(matches))}")

    def resolve_command(self, ctx, args):
        # always return the full command name
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name, cmd, args


#
# Options we want for all commands
#
@click.group(cls=AliasedGroup)
@click.option('--api-url', '-u', default=None, metavar="URL",
                    help=f"Backend base URL (default: ${ENV_API_URL} or {DEFAULT_SERVER})")
@click.option('--signer', '-s', default=None, metavar="remote,local",
                    help=f"Signing strategies to try, in order (default: ${ENV_SIGNER} or remote)")
@click.option('--timeout', '-t', default=None, type=float, metavar="SECS",
                    help="Network timeout; default is to wait forever")
@click.option('--verbose', '-v', is_flag=True, 
                    help="Show traffic with backend.")
@click.option('--pdb', is_flag=True, 
                    help="Prepare patient for surgery to remove bugs.")
@click.version_option(version=__version__)
def main(**kws):
    '''
    Record harvests and anchor signed copies of them via the AgriDatum backend.

    Farmers are identified by phone number and 6-digit PIN only; nothing is
    stored locally. Any distinct prefix works for all commands.
    '''
    # implement PDB option here
    if kws.pop('pdb', False):
        import pdb
        def doit(ex_cls, ex, tb):
            pdb.pm()
        sys.excepthook = doit

    if kws.get('verbose'):
        import agridatum.net as nn
        nn.VERBOSE = True
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    # global options, mostly not considered here
    global global_opts
    global_opts.update(kws)


@main.command('id')
@click.argument('phone', type=str, metavar="PHONE")
@click.argument('pin', type=str, metavar="[6-digit PIN]", required=False)
@click.option('--show-seed', is_flag=True, help="Also show the seed input (keep private!)")
def show_identity(phone, pin, show_seed):
    "Show the farmer ID for a phone number and PIN. Works offline."
    pin = cleanup_pin(pin)
    ident = derive(phone, pin)

    click.echo(ident.farmer_id)
    if show_seed:
        click.echo(ident.seed_input)

@main.command('signup')
@click.argument('phone', type=str, metavar="PHONE")
@click.option('--name', '-n', 'full_name', required=True, help="Farmer's full name")
def signup_farmer(phone, full_name):
    "Register as a new farmer: pick a PIN (asked twice) and get your farmer ID"
    pin = cleanup_pin(None, confirm=True)

    config = get_config()
    api = get_api(config)
    try:
        session = FarmerSession.signup(full_name, phone, pin, pin, api, get_signer(api, config))
    except HarvestValidationError as err:
        fail(str(err))

    click.echo(f"Welcome, {session.full_name}\nYour farmer ID: {session.farmer_id}")
    click.echo("Keep your phone number and PIN: they are the only way back in.")

@main.command('sign')
@click.argument('phone', type=str, metavar="PHONE")
@click.argument('pin', type=str, metavar="[6-digit PIN]", required=False)
@click.option('--crop', '-c', default=DEFAULT_CROP, help="Crop type")
@click.option('--weight', '-w', type=float, required=True, help="Harvest weight (kg)")
@click.option('--plot', '-p', required=True, help="Plot name / location")
@click.option('--timestamp', default=None, help="ISO-8601 time (default: now)")
@display_errors
def sign_harvest(phone, pin, crop, weight, plot, timestamp):
    "Show key, address and signature for a harvest, without submitting it"
    pin = cleanup_pin(pin)
    try:
        weight = validate_weight(weight)
    except HarvestValidationError as err:
        fail(str(err))

    config = get_config()
    signer = get_signer(get_api(config), config)

    ident = derive(phone, pin)
    payload = HarvestPayload.build(crop, weight, plot, ident.farmer_id, timestamp=timestamp)
    rv = signer.sign(payload, ident.seed_input, phone_number=phone)

    click.echo(json.dumps(dict(payload=payload.as_json(),
                               signer=signer.last_used,
                               publicKey=rv.public_key,
                               farmerAddress=rv.farmer_address,
                               signature=rv.signature), indent=2))

@main.command('submit')
@click.argument('phone', type=str, metavar="PHONE")
@click.argument('pin', type=str, metavar="[6-digit PIN]", required=False)
@click.option('--crop', '-c', default=DEFAULT_CROP, help="Crop type")
@click.option('--weight', '-w', type=float, required=True, help="Harvest weight (kg)")
@click.option('--plot', '-p', required=True, help="Plot name / location")
@click.option('--open-browser', '-o', is_flag=True, 
                help="Launch web browser to view the transaction")
def submit_harvest(phone, pin, crop, weight, plot, open_browser):
    "Record a harvest: sign it and submit to the backend"
    session, pin = get_session(phone, pin, load_records=False)

    rv = session.record_harvest(pin, plot, crop, weight)
    if not rv.success:
        fail(rv.error)

    click.echo("Harvest recorded successfully!\n")
    show_record(rv.record, detail=True)

    txn = rv.record.transaction_hash
    if txn:
        url = explorer_url(txn)
        click.echo(f"\n{url}")
        if open_browser:
            click.launch(url)

@main.command('records')
@click.argument('phone', type=str, metavar="PHONE")
@click.argument('pin', type=str, metavar="[6-digit PIN]", required=False)
@click.option('--limit', '-l', type=click.IntRange(min=1), default=LOGIN_RECORDS_LIMIT)
@click.option('--offset', type=click.IntRange(min=0), default=0)
@click.option('--detail', '-d', is_flag=True, help="Show keys and signature previews")
def list_records(phone, pin, limit, offset, detail):
    "List harvest records for a farmer, newest first"
    session, _ = get_session(phone, pin, load_records=False)
    session.load_records(limit=limit, offset=offset)

    if not len(session.store):
        click.echo("Your recorded harvests will appear here once you start using the system.")
        return

    click.echo(f"Harvest Records ({len(session.store)}) for farmer {session.farmer_id}\n")
    for rec in session.store:
        show_record(rec, detail=detail)

@main.command('all')
@click.option('--crop', '-c', default=None, help="Only this crop type")
@click.option('--start', default=None, metavar="YYYY-MM-DD")
@click.option('--end', default=None, metavar="YYYY-MM-DD")
@click.option('--limit', '-l', type=click.IntRange(min=1), default=ALL_RECORDS_LIMIT)
@click.option('--offset', type=click.IntRange(min=0), default=0)
@display_errors
def list_all_records(crop, start, end, limit, offset):
    "List harvest records from all farmers"
    from agridatum.api import transform_api_records

    rows = get_api().get_all_records(crop_type=crop, start_date=start, end_date=end,
                                        limit=limit, offset=offset)
    if not rows:
        click.echo("(none found)")
        return

    for rec in transform_api_records(rows):
        show_record(rec)

@main.command('export')
@click.argument('phone', type=str, metavar="PHONE")
@click.argument('pin', type=str, metavar="[6-digit PIN]", required=False)
@click.option('--outfile', '-o', metavar="records.json", default=None,
                        help="Where to write (default: agridatum-records-DATE.json, '-' for stdout)")
def export_records(phone, pin, outfile):
    "Save all records for a farmer as JSON"
    session, _ = get_session(phone, pin)

    outfile = outfile or RecordStore.export_filename()
    data = session.store.export_json()

    with click.open_file(outfile, 'wt') as fd:
        fd.write(data)
        fd.write('\n')

    if outfile != '-':
        click.echo(f"Wrote {len(session.store)} records to: {outfile}", err=1)

@main.command('verify')
@click.option('--record-id', '-r', default=None, help="Backend record id")
@click.option('--txn', '-x', default=None, help="Transaction hash")
@display_errors
def verify_record(record_id, txn):
    "Ask backend to check a record's signature and on-chain status"
    if not record_id and not txn:
        fail("Need a record id or a transaction hash (or both).")

    v = get_api().verify_harvest(record_id=record_id, transaction_hash=txn)

    ok = lambda x: '?' if x is None else ('yes' if x else 'NO')
    click.echo(f"Signature valid:   {ok(v.signature_valid)}")
    click.echo(f"Indexed on chain:  {ok(v.blockchain_indexed)}")
    click.echo(f"Chain valid:       {ok(v.blockchain_valid)}")
    if v.transaction_hash:
        click.echo(f"Transaction:       {v.transaction_hash}")

@main.command('qr')
@click.argument('txn', type=str, metavar="TXN_HASH")
@click.option('--outfile', '-o', metavar="filename.png",
                        help="Save an SVG or PNG (depends on extension)", default=None,
                        type=click.File('wb'))
@click.option('--error-mode', '-e', default='L', metavar="L|M|H",
            help="Forward error correction level (L = low, H=High=bigger)")
def get_txn_qr(txn, outfile, error_mode):
    "Show the explorer link for a transaction as a QR"
    import pyqrcode

    url = explorer_url(txn)
    q = pyqrcode.create(url, error=error_mode)

    if not outfile:
        print(q.terminal(quiet_zone=2))
        print((' '*4) + url)
        print()
    else:
        if outfile.name.lower().endswith('.svg'):
            q.svg(outfile, scale=4)
        else:
            q.png(outfile, scale=4)

        click.echo(f"Wrote {outfile.tell():,} bytes to: {outfile.name}", err=1)

# EOF
