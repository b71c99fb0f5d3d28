import argparse

from correios_hub.core.logging import configure_logging
from correios_hub.integrations.correios import CorreiosClient


# Run:
# export $(grep -v '^#' .env | xargs)   # if you keep credentials in .env
# python scripts/ping_correios.py --staging 03220 03298 --origin 01001000 --destination 20040002

def main(argv=None):
    parser = argparse.ArgumentParser(description="Authenticate against Correios and optionally price products.")
    parser.add_argument("products", nargs="*", help="product codes (coProduto) to price")
    parser.add_argument("--staging", action="store_true", help="use the homologation host")
    parser.add_argument("--origin", help="origin CEP (cepOrigem)")
    parser.add_argument("--destination", help="destination CEP (cepDestino)")
    parser.add_argument("--weight", default="300", help="weight in grams (psObjeto)")
    parser.add_argument("-v", "--verbose", action="store_true", help="log request/response details")
    args = parser.parse_args(argv)

    log = configure_logging("DEBUG" if args.verbose else None)

    with CorreiosClient(production=False if args.staging else None) as cli:
        cli.http.authenticate()
        log.info("token ok, expires at %s", cli.http.token_expires_at.isoformat())

        for idx, code in enumerate(args.products, start=1):
            cli.add_product(code, {
                "nuRequisicao": str(idx),
                "cepOrigem": args.origin,
                "cepDestino": args.destination,
                "psObjeto": args.weight,
            })
        if not args.products:
            return

        cli.query_prices()
        for code in args.products:
            print(code, cli.price_total(code))


if __name__ == "__main__":
    main()


# Seeing the token expiry (and a price per product) means credentials, card and host are OK
