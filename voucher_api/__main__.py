from voucher_api.main import run

run()
