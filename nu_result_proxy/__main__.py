from nu_result_proxy.app import main

main()
