from create_lib.cli import main

main()
