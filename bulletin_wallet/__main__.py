from bulletin_wallet.cli import main

main()
