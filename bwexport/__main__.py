from bwexport.main import main

main()  # pragma: no cover
